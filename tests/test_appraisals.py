"""Appraisals merging and gem removal."""
from __future__ import annotations

import textwrap
import unittest

from rbmerge.appraisals import merge, remove_gem_dependency
from rbmerge.source_merger import apply


def _t(text: str) -> str:
    return textwrap.dedent(text).lstrip("\n")


TEMPLATE = _t("""
    # preamble from template
    # a second line

    # Header for unlocked
    appraise "unlocked" do
      eval_gemfile "a.gemfile"
      eval_gemfile "b.gemfile"
    end

    # Header for current
    appraise "current" do
      eval_gemfile "x.gemfile"
    end

    # Header for pre-existing
    appraise "pre-existing" do
      eval_gemfile "pre-existing.gemfile"
    end
""")

DEST = _t("""
    # preamble from dest

    # Old header for unlocked
    appraise "unlocked" do
      eval_gemfile "a.gemfile"
      # keep this custom line
      eval_gemfile "custom.gemfile"
    end

    appraise "custom" do
      gem "my_custom", "~> 1"
    end

    # Header for pre-existing
    appraise "pre-existing" do
      eval_gemfile "old-pre-existing.gemfile"
    end
""")


class AppraisalsMergeTests(unittest.TestCase):
    def setUp(self) -> None:
        self.merged = merge(TEMPLATE, DEST)

    def test_preambles_template_first(self) -> None:
        self.assertTrue(self.merged.startswith("# preamble from template\n# a second line\n"))
        self.assertIn("# preamble from dest", self.merged)

    def test_matching_blocks_union_bodies(self) -> None:
        unlocked = self.merged.split('appraise "unlocked" do\n', 1)[1].split("end\n", 1)[0]
        self.assertEqual(
            unlocked,
            '  eval_gemfile "a.gemfile"\n'
            '  # keep this custom line\n'
            '  eval_gemfile "custom.gemfile"\n'
            '  eval_gemfile "b.gemfile"\n',
        )
        self.assertIn(
            '# Header for unlocked\n# Old header for unlocked\nappraise "unlocked" do\n',
            self.merged,
        )

    def test_destination_only_and_template_only_blocks(self) -> None:
        self.assertIn('appraise "custom" do\n  gem "my_custom", "~> 1"\nend\n', self.merged)
        self.assertIn('# Header for current\nappraise "current" do\n  eval_gemfile "x.gemfile"\nend\n', self.merged)
        self.assertEqual(self.merged.count("# Header for pre-existing"), 1)
        self.assertIn(
            'appraise "pre-existing" do\n'
            '  eval_gemfile "old-pre-existing.gemfile"\n'
            '  eval_gemfile "pre-existing.gemfile"\n'
            'end\n',
            self.merged,
        )

    def test_no_freeze_reminder_injected(self) -> None:
        self.assertNotIn("kettle-dev:freeze", self.merged)

    def test_idempotent(self) -> None:
        self.assertEqual(merge(TEMPLATE, self.merged), self.merged)
        self.assertEqual(merge(self.merged, self.merged), self.merged)


class AppraisalsEdgeTests(unittest.TestCase):
    def test_destination_header_kept_when_template_has_none(self) -> None:
        template = 'appraise "unlocked" do\n  eval_gemfile "a.gemfile"\nend\n'
        dest = '# Existing header\nappraise "unlocked" do\n  eval_gemfile "a.gemfile"\nend\n'
        self.assertEqual(merge(template, dest), dest)

    def test_blank_destination_returns_normalized_template(self) -> None:
        template = '\n\nappraise "a" do\n\n  gem "x"\nend\n\n\n'
        self.assertEqual(merge(template, "  \n"), 'appraise "a" do\n  gem "x"\nend\n')

    def test_blank_template_returns_normalized_destination(self) -> None:
        self.assertEqual(merge("", 'appraise "a" do\n  gem "x"\nend\n\n\n'), 'appraise "a" do\n  gem "x"\nend\n')

    def test_block_union_through_apply(self) -> None:
        template = 'appraise "unlocked" do\n  eval_gemfile "a.gemfile"\n  eval_gemfile "b.gemfile"\nend\n'
        dest = 'appraise "unlocked" do\n  eval_gemfile "a.gemfile"\n  eval_gemfile "custom.gemfile" # Custom gemfile\nend\n'
        out = apply("merge", template, dest, "Appraisals")
        body = out.split('appraise "unlocked" do\n', 1)[1]
        self.assertEqual(
            body,
            '  eval_gemfile "a.gemfile"\n'
            '  eval_gemfile "custom.gemfile" # Custom gemfile\n'
            '  eval_gemfile "b.gemfile"\n'
            'end\n',
        )


class RemoveGemDependencyTests(unittest.TestCase):
    CONTENT = _t("""
        appraise "a" do
          gem "foo"
          # keep bar
          gem "bar"
        end

        appraise "b" do
          group :test do
            gem "foo", "~> 2"
          end
        end

        gem "foo"
    """)

    def test_removes_only_inside_appraise_blocks(self) -> None:
        out = remove_gem_dependency(self.CONTENT, "foo")
        self.assertEqual(
            out,
            _t("""
                appraise "a" do
                  # keep bar
                  gem "bar"
                end

                appraise "b" do
                  group :test do
                  end
                end

                gem "foo"
            """),
        )

    def test_blank_name_is_a_no_op(self) -> None:
        self.assertIs(remove_gem_dependency(self.CONTENT, "  "), self.CONTENT)
