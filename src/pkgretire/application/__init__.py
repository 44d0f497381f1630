"""
Application layer: ports and the retirement workflow.
"""
