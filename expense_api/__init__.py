"""Flask JSON API for the expense tracker."""
