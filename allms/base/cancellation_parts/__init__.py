"""Cancellation implementation modules (see ``allms.base.cancellation``)."""
