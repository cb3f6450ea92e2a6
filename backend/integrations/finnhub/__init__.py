"""Finnhub market data integration."""
from .client import FinnhubClient, CompanyNewsArticle

__all__ = ["FinnhubClient", "CompanyNewsArticle"]
