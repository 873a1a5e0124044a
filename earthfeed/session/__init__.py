"""Session control: the single displayed feed and its event queue."""

from earthfeed.session.controller import FeedPresenter, SessionController, error_descriptor

__all__ = ["FeedPresenter", "SessionController", "error_descriptor"]
