"""
Tests for billing attribution: direct, head-office (Matriz), manual and exclusion.
"""

import pytest

from conciliador.attribution import resolve_attribution
from conciliador.models import BillingOrigin

HEAD_OFFICE = "11111111000100"
BRANCH      = "11111111000299"
OTHER       = "22222222000100"


@pytest.fixture
def senior_index():
    return {HEAD_OFFICE: object()}


@pytest.fixture
def prefixes():
    return frozenset({"11111111"})


def resolve(doc_id, senior_index, prefixes, overrides=None, exclusions=()):
    return resolve_attribution(doc_id, senior_index, prefixes, overrides or {}, frozenset(exclusions))


class TestDirect:

    def test_direct_always_wins(self, senior_index, prefixes):
        for overrides, exclusions in [({}, ()), ({HEAD_OFFICE: OTHER}, ()),
                                      ({}, (HEAD_OFFICE,)), ({HEAD_OFFICE: BRANCH}, (HEAD_OFFICE,))]:
            attr = resolve(HEAD_OFFICE, senior_index, prefixes, overrides, exclusions)
            assert attr.has_direct is True
            assert attr.covered is True
            assert attr.origin == BillingOrigin.DIRECT

    def test_direct_with_override_keeps_direct(self, senior_index, prefixes):
        attr = resolve(HEAD_OFFICE, senior_index, prefixes, {HEAD_OFFICE: HEAD_OFFICE})
        assert attr.has_manual is True
        assert attr.origin == BillingOrigin.DIRECT


class TestMatriz:

    def test_branch_inherits_from_head_office(self, senior_index, prefixes):
        attr = resolve(BRANCH, senior_index, prefixes)
        assert attr.has_direct is False
        assert attr.has_group is True
        assert attr.covered is True
        assert attr.origin == BillingOrigin.MATRIZ

    def test_exclusion_only_suppresses_group(self, senior_index, prefixes):
        excluded = resolve(BRANCH, senior_index, prefixes, exclusions=(BRANCH,))
        assert excluded.has_group is False
        assert excluded.covered is False
        assert excluded.origin == BillingOrigin.IGNORADO

        restored = resolve(BRANCH, senior_index, prefixes)
        assert restored.origin == BillingOrigin.MATRIZ
        assert restored.covered is True

    def test_short_id_never_inherits(self, senior_index):
        attr = resolve("1111111", senior_index, frozenset({"1111111"}))
        assert attr.has_group is False
        assert attr.origin == BillingOrigin.AUSENTE

    def test_unrelated_root_is_absent(self, senior_index, prefixes):
        attr = resolve(OTHER, senior_index, prefixes)
        assert attr.covered is False
        assert attr.origin == BillingOrigin.AUSENTE

    def test_exclusion_without_group_is_ignorado(self, senior_index, prefixes):
        attr = resolve(OTHER, senior_index, prefixes, exclusions=(OTHER,))
        assert attr.origin == BillingOrigin.IGNORADO


class TestManual:

    def test_manual_to_direct_payer(self, senior_index, prefixes):
        attr = resolve(OTHER, senior_index, prefixes, {OTHER: HEAD_OFFICE})
        assert attr.has_manual is True
        assert attr.origin == BillingOrigin.MANUAL

    def test_manual_to_payer_covered_by_root(self, senior_index, prefixes):
        attr = resolve(OTHER, senior_index, prefixes, {OTHER: "11111111999999"})
        assert attr.has_manual is True
        assert attr.origin == BillingOrigin.MANUAL

    def test_manual_beats_group(self, senior_index, prefixes):
        attr = resolve(BRANCH, senior_index, prefixes, {BRANCH: HEAD_OFFICE})
        assert attr.has_group is True
        assert attr.has_manual is True
        assert attr.origin == BillingOrigin.MANUAL

    def test_manual_ignores_exclusion(self, senior_index, prefixes):
        attr = resolve(BRANCH, senior_index, prefixes, {BRANCH: HEAD_OFFICE}, (BRANCH,))
        assert attr.has_group is False
        assert attr.covered is True
        assert attr.origin == BillingOrigin.MANUAL

    def test_manual_to_unbilled_payer_gives_nothing(self, senior_index, prefixes):
        attr = resolve(OTHER, senior_index, prefixes, {OTHER: "33333333000100"})
        assert attr.has_manual is False
        assert attr.origin == BillingOrigin.AUSENTE
