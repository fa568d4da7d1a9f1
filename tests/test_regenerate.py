"""Tests for azcfg.template.regenerate — render and user-code merge."""

from __future__ import annotations

import pytest

from azcfg.template import SectionTable, generate, merge_user_code
from azcfg.types import SectionFilter

INCLUDES_TEMPLATE = (
    "/* USER CODE BEGIN Includes */\n"
    '#include "a.h"\n'
    "/* USER CODE END Includes */\n"
    "void f(void) {}\n"
)


class TestRoundTrip:
    @pytest.mark.parametrize(
        "text",
        [
            "",
            "\n",
            "no markers at all",
            "trailing\n\n\n",
            INCLUDES_TEMPLATE,
            "/* USER CODE BEGIN A */\n/* USER CODE END A */",
            "/* USER CODE BEGIN A */\n\n/* USER CODE END A */\n",
            "/* USER CODE BEGIN Foo */\nint x;\n",
            "a\r\n/* USER CODE BEGIN X */\r\nbody\r\n/* USER CODE END X */\r\n",
            "  \n/* USER CODE BEGIN A */\nx\n/* USER CODE END A */\n \n",
        ],
    )
    def test_unmodified_render_is_identical(self, text: str):
        assert generate(SectionTable.parse(text)) == text

    def test_cubemx_main(self, main_c_template: str):
        assert generate(SectionTable.parse(main_c_template)) == main_c_template


class TestSingleEdit:
    def test_includes_scenario(self):
        table = SectionTable.parse(INCLUDES_TEMPLATE)
        assert table.list_sections(SectionFilter.USER_CODE_ONLY) == ["Includes"]
        assert table.read_content("Includes") == '#include "a.h"'

        table.update("Includes", '#include "b.h"')

        assert generate(table) == INCLUDES_TEMPLATE.replace('"a.h"', '"b.h"')
        assert table.is_modified("Includes") is True

        table.reset("Includes")
        assert generate(table) == INCLUDES_TEMPLATE

    def test_other_sections_untouched(self, main_c_template: str):
        table = SectionTable.parse(main_c_template)
        table.update("1", "  uint32_t ticks = 0;\n  uint32_t count = 0;")
        out = generate(table)

        assert out.startswith(main_c_template.split("  /* USER CODE BEGIN 1 */")[0])
        assert out.endswith(main_c_template.split("  /* USER CODE END 1 */")[1])
        assert "  uint32_t ticks = 0;\n  uint32_t count = 0;\n  /* USER CODE END 1 */" in out

    def test_body_can_grow_and_shrink(self, main_c_template: str):
        table = SectionTable.parse(main_c_template)
        table.update("Header", "")
        shrunk = generate(table)
        assert "/* USER CODE BEGIN Header */\n/* USER CODE END Header */" in shrunk
        table.update("Header", "a\nb\nc\nd\ne")
        assert "/* USER CODE BEGIN Header */\na\nb\nc\nd\ne\n/* USER CODE END Header */" in (
            generate(table)
        )

    def test_empty_body_gets_content(self, main_c_template: str):
        table = SectionTable.parse(main_c_template)
        table.update("3", "    HAL_Delay(100);")
        assert (
            "    /* USER CODE BEGIN 3 */\n    HAL_Delay(100);\n    /* USER CODE END 3 */"
            in generate(table)
        )

    def test_marker_text_in_content_is_emitted_verbatim(self):
        table = SectionTable.parse(INCLUDES_TEMPLATE)
        table.update("Includes", "/* USER CODE END Includes */")
        out = generate(table)
        assert out.count("/* USER CODE END Includes */") == 2


class TestMalformedScenarios:
    def test_unmatched_begin(self):
        text = "/* USER CODE BEGIN Foo */\nint x;\nvoid g(void) {}\n"
        table = SectionTable.parse(text)
        assert "Foo" not in table.list_sections()
        assert generate(table) == text

    def test_duplicate_id(self):
        text = (
            "/* USER CODE BEGIN X */\n"
            "one\n"
            "/* USER CODE END X */\n"
            "/* USER CODE BEGIN X */\n"
            "two\n"
            "/* USER CODE END X */\n"
        )
        table = SectionTable.parse(text)
        assert table.read_content("X") == "two"
        assert generate(table) == text

    def test_duplicate_edit_only_touches_last(self):
        text = (
            "/* USER CODE BEGIN X */\n"
            "one\n"
            "/* USER CODE END X */\n"
            "/* USER CODE BEGIN X */\n"
            "two\n"
            "/* USER CODE END X */"
        )
        table = SectionTable.parse(text)
        table.update("X", "three")
        assert generate(table) == text.replace("two", "three")


class TestMergeUserCode:
    def test_carries_edited_sections(self, main_c_template: str):
        old = SectionTable.parse(main_c_template)
        old.update("Includes", '#include "tx_api.h"')
        existing = generate(old)

        fresh = SectionTable.parse(main_c_template)
        report = merge_user_code(fresh, existing)

        assert report.carried == ("Includes",)
        assert set(report.unchanged) == {"Header", "1", "3"}
        assert report.orphaned == ()
        assert generate(fresh) == existing

    def test_orphaned_sections_are_reported(self, caplog: pytest.LogCaptureFixture):
        existing = "/* USER CODE BEGIN Gone */\nkeep me\n/* USER CODE END Gone */\n"
        fresh = SectionTable.parse(INCLUDES_TEMPLATE)
        report = merge_user_code(fresh, existing)

        assert report.orphaned == ("Gone",)
        assert generate(fresh) == INCLUDES_TEMPLATE
        assert "Gone" in caplog.text

    def test_filler_id_in_old_file_is_orphaned(self):
        existing = (
            "/* USER CODE BEGIN NonUserCode_1 */\nx\n/* USER CODE END NonUserCode_1 */\n"
        )
        fresh = SectionTable.parse("head\n" + INCLUDES_TEMPLATE)
        report = merge_user_code(fresh, existing)
        assert report.orphaned == ("NonUserCode_1",)
        assert fresh.modified_sections() == []

    def test_template_change_outside_sections_is_kept(self):
        existing = INCLUDES_TEMPLATE.replace('"a.h"', '"mine.h"')
        new_template = INCLUDES_TEMPLATE.replace("void f(void) {}", "void f(int x) {}")
        fresh = SectionTable.parse(new_template)
        merge_user_code(fresh, existing)

        out = generate(fresh)
        assert '#include "mine.h"' in out
        assert "void f(int x) {}" in out
