from cellwidgets.app.application import Application

__all__ = ["Application"]
