"""
HTTP layer for the DocAI document chat service
"""
