"""Snail Points - client and web dashboard for the Snail Points reward tracker."""

__version__ = "0.1.0"
