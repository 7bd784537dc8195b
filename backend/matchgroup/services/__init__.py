"""
Services Layer

Pure match group logic:
- Accept stored match records (flat dicts) and group ids
- Return typed matchlists, brackets, matches and teams
- Do NOT depend on HTTP request/response objects or the database
  (match_record_store is the only module that reads a Session)
"""
