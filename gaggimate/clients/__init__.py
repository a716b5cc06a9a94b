from gaggimate.clients.history import HistoryClient, HistoryRequestError

__all__ = ["HistoryClient", "HistoryRequestError"]
