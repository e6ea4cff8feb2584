"""Test package marker so helpers import as `tests.collection_helpers`."""
