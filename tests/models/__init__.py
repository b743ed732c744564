"""Contains the tests for the models of the package."""
