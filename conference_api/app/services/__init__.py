"""
Service layer abstraction.

Each service encapsulates business logic for a domain and receives the
shared ``Database`` handle (and, where needed, the file store) at
construction, so API handlers stay free of SQL.
"""
