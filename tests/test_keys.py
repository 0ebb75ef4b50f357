import unittest

from s3tree.errors import MalformedKeyError
from s3tree.keys import parse_key, split_path


class TestParseKey(unittest.TestCase):
    def test_plain_key(self) -> None:
        parsed = parse_key("photos/2025/img.jpg")
        self.assertEqual(parsed.segments, ("photos", "2025", "img.jpg"))
        self.assertFalse(parsed.is_directory)
        self.assertEqual(parsed.name, "img.jpg")

    def test_root_label_is_prepended(self) -> None:
        parsed = parse_key("a/b.txt", root_label="my-bucket")
        self.assertEqual(parsed.segments, ("my-bucket", "a", "b.txt"))

    def test_trailing_slash_is_directory_marker(self) -> None:
        parsed = parse_key("photos/2025/")
        self.assertTrue(parsed.is_directory)
        self.assertEqual(parsed.segments, ("photos", "2025"))

    def test_repeated_separators_are_collapsed(self) -> None:
        self.assertEqual(parse_key("/a//b///c").segments, ("a", "b", "c"))
        self.assertEqual(split_path("//x//"), ("x",))

    def test_empty_key_is_malformed(self) -> None:
        with self.assertRaises(MalformedKeyError) as ctx:
            parse_key("")
        self.assertEqual(ctx.exception.key, "")

    def test_separator_only_key_is_malformed(self) -> None:
        with self.assertRaises(MalformedKeyError):
            parse_key("///", root_label="bucket")


if __name__ == "__main__":
    unittest.main()
