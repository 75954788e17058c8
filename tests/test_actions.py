"""
Tests for operator actions (pure state transitions + audit entries).
"""

import pytest

from conciliador import actions
from conciliador.actions import LoginError
from conciliador.core_engine import build_consolidated
from conciliador.models import BillingOrigin, Source


def origin_of(state, doc_id):
    return {e.id: e.senior_origin for e in build_consolidated(state)}[doc_id]


class TestLogin:

    def test_name_is_trimmed(self):
        name, entry = actions.login("  Maria  ")
        assert name == "Maria"
        assert entry.action == "Login"
        assert entry.user == "Maria"
        assert entry.details == 'Utilizador "Maria" acedeu ao sistema.'

    @pytest.mark.parametrize("blank", ["", "   ", None])
    def test_blank_name_rejected(self, blank):
        with pytest.raises(LoginError, match="Informe seu nome"):
            actions.login(blank)


class TestPayerActions:

    def test_assign_bulk_then_remove(self, make_state):
        state = make_state(
            questor=[{"INSCRFEDERAL": "1"}, {"INSCRFEDERAL": "2"}],
            senior=[{"CNPJ": "99999999000100"}],
        )
        new_state, entry = actions.assign_payer(state, ["1", "2"], "99999999000100", user="Ana")
        assert new_state.payer_overrides == {"1": "99999999000100", "2": "99999999000100"}
        assert new_state.version == state.version + 1
        assert state.payer_overrides == {}
        assert entry.action == "Vínculo Manual"
        assert entry.details == "2 clientes vinculados ao pagador 99999999000100."
        assert entry.user == "Ana"
        assert origin_of(new_state, "1") == BillingOrigin.MANUAL

        removed, entry = actions.remove_payer(new_state, "1", user="Ana")
        assert removed.payer_overrides == {"2": "99999999000100"}
        assert entry.details == "Vínculo manual removido do cliente 1."
        assert origin_of(removed, "1") == BillingOrigin.AUSENTE

    def test_reassign_replaces_target(self, make_state):
        state = make_state(overrides={"1": "A"})
        new_state, _ = actions.assign_payer(state, ["1"], "B")
        assert new_state.payer_overrides == {"1": "B"}

    def test_remove_missing_link_still_logged(self, make_state):
        state = make_state()
        new_state, entry = actions.remove_payer(state, "404")
        assert new_state.payer_overrides == {}
        assert entry.user == "SISTEMA"


class TestMatrixToggle:

    def test_toggle_on_and_off(self, make_state):
        state = make_state(
            questor=[{"INSCRFEDERAL": "11111111000299"}],
            senior=[{"CNPJ": "11111111000100"}],
        )
        assert origin_of(state, "11111111000299") == BillingOrigin.MATRIZ

        off, entry = actions.toggle_matrix_exclusion(state, "11111111000299", user="Rui")
        assert off.matrix_exclusions == frozenset({"11111111000299"})
        assert entry.details == "Regra de 8 dígitos desativada para o cliente 11111111000299."
        assert origin_of(off, "11111111000299") == BillingOrigin.IGNORADO

        on, entry = actions.toggle_matrix_exclusion(off, "11111111000299", user="Rui")
        assert on.matrix_exclusions == frozenset()
        assert entry.details == "Regra de 8 dígitos reativada para o cliente 11111111000299."
        assert origin_of(on, "11111111000299") == BillingOrigin.MATRIZ
        assert on.version == state.version + 2


class TestSourceActions:

    def test_import_and_clear(self, make_state):
        state = make_state()
        rows = [{"INSCRFEDERAL": "12.345.678/0001-99"}, {"INSCRFEDERAL": "12345678000199"}]
        imported, entry = actions.import_records(state, "questor", rows, user="Ana")
        assert len(imported.questor) == 1
        assert entry.action == "Importação"
        assert entry.details == "Adicionados 1 registos no sistema QUESTOR."

        cleared, entry = actions.clear_source(imported, Source.QUESTOR)
        assert cleared.questor == ()
        assert entry.details == "A base do sistema QUESTOR foi limpa."
        assert build_consolidated(cleared) == []
