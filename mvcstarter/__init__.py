"""MVC web application starter: env-driven configuration, URL rules and
controller/action dispatch for web and console entry points."""

__version__ = "1.0.0"
