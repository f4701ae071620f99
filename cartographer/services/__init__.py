"""
Services: broker access, worker loop, model ownership, bootstrap.
"""
