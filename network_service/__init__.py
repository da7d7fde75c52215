"""
Professional network service - users, posts, connections and notifications
"""

__version__ = "1.0.0"
