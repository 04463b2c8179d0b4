"""
App Store page scraping and crawl orchestration.
"""
