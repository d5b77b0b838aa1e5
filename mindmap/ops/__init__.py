"""Operations modules: file-level logic extracted from the editor window.

Each module contains plain functions that operate on a GraphStore.  The
window wires these to toolbar actions and handles dialogs and errors.
"""
