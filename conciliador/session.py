# conciliador/session.py
import logging

from . import actions
from . import db_handler
from .core_engine import build_consolidated
from .file_loader import load_file

logger = logging.getLogger(__name__)


class ReconSession:
    """
    One operator's working session over the shared store.

    Every mutating call follows the same order: apply the action, save with
    the version it was based on, write the audit entry, recompute the
    consolidated view. `entities` is therefore never stale when read.
    """

    def __init__(self, db_path, operator=None):
        self.db_path = db_path
        self.operator = operator
        db_handler.init_db(db_path)
        self.state = db_handler.load_state(db_path)
        self.entities = []
        self.recompute()

    @classmethod
    def login(cls, db_path, name):
        name, entry = actions.login(name)
        session = cls(db_path, operator=name)
        db_handler.log_action(entry, db_path)
        return session

    def recompute(self):
        self.entities = build_consolidated(self.state)
        return self.entities

    def reload(self):
        """Pick up whatever is in the store now (after a StaleStateError)."""
        self.state = db_handler.load_state(self.db_path)
        return self.recompute()

    def _apply(self, action, *args):
        new_state, entry = action(self.state, *args, user=self.operator)
        db_handler.save_state(new_state, self.db_path, base_version=self.state.version)
        db_handler.log_action(entry, self.db_path)
        self.state = new_state
        self.recompute()
        return entry

    # ── Operator actions ─────────────────────────────────────────────────────
    def assign_payer(self, doc_ids, payer_id):
        return self._apply(actions.assign_payer, doc_ids, payer_id)

    def remove_payer(self, doc_id):
        return self._apply(actions.remove_payer, doc_id)

    def toggle_matrix_exclusion(self, doc_id):
        return self._apply(actions.toggle_matrix_exclusion, doc_id)

    def import_rows(self, source, rows):
        return self._apply(actions.import_records, source, rows)

    def import_file(self, source, filename, raw):
        rows = load_file(filename, raw, source)
        return self.import_rows(source, rows)

    def clear_source(self, source):
        return self._apply(actions.clear_source, source)

    def audit_log(self):
        return db_handler.get_audit_log(self.db_path)
