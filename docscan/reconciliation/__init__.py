from docscan.reconciliation.reconciler import apply_edit, apply_edits

__all__ = ["apply_edit", "apply_edits"]
