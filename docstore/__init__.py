"""docstore/ -- Document store adapter for the account service.

Exposes find_one / insert_one / update_one over named collections of JSON
documents and a closed set of StoreError kinds.

Layer rule: docstore/ imports only core/ + stdlib + third-party libraries.
auth/ and api/ import from docstore/, not the other way around.
"""
