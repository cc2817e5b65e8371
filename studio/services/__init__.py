"""
studio/services/ -- Application services wired together by ``Session``.
"""
