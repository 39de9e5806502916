"""
FairGrade Services
==================

Business logic behind the tracking functions. Route handlers stay thin and
call into these modules with the request's store.
"""
