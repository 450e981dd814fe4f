import os
import sys
import unittest

# Ensure project src/ is on sys.path for imports
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
src_path = os.path.join(ROOT, "src")
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from utils.pure import clean_image_path  # noqa: E402


class CleanImagePathTestCase(unittest.TestCase):
    def test_documented_examples(self):
        self.assertEqual(clean_image_path("./images/foo.png"), "images/foo.png")
        self.assertEqual(clean_image_path("C:\\Users\\a\\images\\b.png"), "images/b.png")
        self.assertEqual(clean_image_path("http://x/y.png"), "http://x/y.png")
        self.assertEqual(clean_image_path("foo.png"), "images/foo.png")
        self.assertEqual(clean_image_path("images"), "")

    def test_empty_and_blank(self):
        self.assertEqual(clean_image_path(None), "")
        self.assertEqual(clean_image_path(""), "")
        self.assertEqual(clean_image_path("   \t "), "")

    def test_urls_and_data_uris_untouched(self):
        self.assertEqual(
            clean_image_path("  HTTPS://cdn.example.com/a/b.png "),
            "HTTPS://cdn.example.com/a/b.png",
        )
        self.assertEqual(
            clean_image_path("data:image/png;base64,iVBORw0KGgo="),
            "data:image/png;base64,iVBORw0KGgo=",
        )

    def test_images_folder_anywhere_is_rerooted(self):
        self.assertEqual(clean_image_path("assets/Images/shoes/red.png"), "images/shoes/red.png")
        self.assertEqual(clean_image_path("/var/www/IMAGES/x.png"), "images/x.png")
        self.assertEqual(clean_image_path("images/"), "")
        self.assertEqual(clean_image_path("./images//"), "")

    def test_windows_paths_keep_file_name(self):
        self.assertEqual(clean_image_path("D:/photos/cat.jpg"), "images/cat.jpg")
        self.assertEqual(clean_image_path("photos\\cat.jpg"), "images/cat.jpg")
        self.assertEqual(clean_image_path("\\"), "")

    def test_leading_dots_and_slashes(self):
        self.assertEqual(clean_image_path("././foo.png"), "images/foo.png")
        self.assertEqual(clean_image_path("/foo.png"), "images/foo.png")
        self.assertEqual(clean_image_path("//static/foo.png"), "static/foo.png")
        self.assertEqual(clean_image_path("./"), "")

    def test_other_relative_paths_kept(self):
        self.assertEqual(clean_image_path("static/img/foo.png"), "static/img/foo.png")

    def test_blanks_inside_names_kept(self):
        self.assertEqual(clean_image_path("images/ a.png"), "images/ a.png")
        self.assertEqual(clean_image_path("shop/images/my photo.png"), "images/my photo.png")
        self.assertEqual(clean_image_path("C:\\pics\\ b.png"), "images/ b.png")
        self.assertEqual(clean_image_path("images/a /"), "images/a")
        self.assertEqual(clean_image_path("x /"), "images/x")

    def test_idempotent(self):
        samples = [
            "",
            "images",
            "foo.png",
            "./images/foo.png",
            "././a/b.png",
            "/./a/b.png",
            "C:\\Users\\a\\images\\b.png",
            "C:foo.png",
            "\\\\server\\share\\pic.gif",
            "http://x/y.png",
            "data:image/gif;base64,R0lGOD",
            "./ a/b",
            "x /",
            "images/ /",
            "images/a/ ",
            "a/ /b",
            "images/ a.png",
            "C:\\pics\\ b.png \\",
            "a/ images/b.png",
            "a//b",
            "/C:/x.png",
            ".",
            "Images/IMAGES/c.png",
            "./http://x/y.png",
        ]
        for raw in samples:
            with self.subTest(raw=raw):
                once = clean_image_path(raw)
                self.assertEqual(clean_image_path(once), once)


if __name__ == "__main__":
    unittest.main()
