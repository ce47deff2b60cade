import unittest

from participation_intake.tokenizer import tokenize


class TokenizerTests(unittest.TestCase):
    def test_plain_fields_split_on_commas(self):
        self.assertEqual(tokenize("a,b,c"), ["a", "b", "c"])

    def test_quoted_comma_stays_inside_field(self):
        self.assertEqual(tokenize('"a,b",c'), ["a,b", "c"])

    def test_empty_middle_field_is_kept(self):
        self.assertEqual(tokenize("a,,c"), ["a", "", "c"])

    def test_fields_are_trimmed(self):
        self.assertEqual(tokenize("  Store Name , 95.5% ,A031  "), ["Store Name", "95.5%", "A031"])

    def test_doubled_quotes_are_dropped_not_unescaped(self):
        self.assertEqual(tokenize('"say ""hi""",x'), ["say hi", "x"])

    def test_unterminated_quote_keeps_collected_text(self):
        self.assertEqual(tokenize('a,"b,c'), ["a", "b,c"])

    def test_field_count_matches_commas_without_quotes(self):
        line = "one,two,,four,,"
        self.assertEqual(len(tokenize(line)), line.count(",") + 1)

    def test_single_field_line(self):
        self.assertEqual(tokenize("lonely"), ["lonely"])
        self.assertEqual(tokenize(""), [""])


if __name__ == "__main__":
    unittest.main()
