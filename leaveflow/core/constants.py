"""
Application constants
"""

SERVICE_NAME = "leaveflow-backend"
