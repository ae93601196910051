"""
Monday Write Proxy - HTTP service.
"""
