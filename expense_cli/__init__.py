"""Command line interface for the expense tracker."""
