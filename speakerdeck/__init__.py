"""
Speakerdeck scraper.

Scrapes user and talk pages of https://speakerdeck.com into typed records,
on top of a small hook-based scraping engine (speakerdeck.scraper). The
records can be served as JSON by the HTTP API in speakerdeck.api.
"""
