"""BDD tests for merging add-to-cart requests."""

from pytest_bdd import scenarios

scenarios("features/cart_merging.feature")
