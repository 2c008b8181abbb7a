"""Pagination wrapper tests."""

import pytest

from querygraph.core.config import settings
from querygraph.services.pagination import (
    count,
    page_to_limit_offset,
    paginate,
    wrap_count,
    wrap_page,
)
from querygraph.services.stage_interpreter import QuerySpec


def test_wrap_page_shape():
    assert (
        wrap_page("SELECT 1", 10, 20)
        == "SELECT * FROM (SELECT 1) AS subquery LIMIT 10 OFFSET 20"
    )


def test_wrap_count_shape():
    assert wrap_count("SELECT 1") == "SELECT COUNT(*) FROM (SELECT 1) AS subquery"


def test_paginate_keeps_inner_limit():
    sql = paginate(QuerySpec(table="users", limit=5), limit=100, offset=0)
    assert sql == "SELECT * FROM (SELECT * FROM users LIMIT 5) AS subquery LIMIT 100 OFFSET 0"


def test_count_renders_spec():
    assert count(QuerySpec(table="users")) == "SELECT COUNT(*) FROM (SELECT * FROM users) AS subquery"


class TestPageToLimitOffset:
    def test_first_page(self):
        assert page_to_limit_offset(1, 50) == (50, 0)

    def test_later_page(self):
        assert page_to_limit_offset(4, 25) == (25, 75)

    def test_default_page_size(self):
        size = settings.query.default_page_size
        assert page_to_limit_offset() == (size, 0)

    @pytest.mark.parametrize("page,page_size", [(0, 10), (-1, 10), (1, 0)])
    def test_rejects_non_positive(self, page, page_size):
        with pytest.raises(ValueError):
            page_to_limit_offset(page, page_size)
