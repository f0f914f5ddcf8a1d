"""
Services Layer

Scheduling services that:
- Accept domain inputs (IDs, sessions, request models)
- Return structured results (result objects, pydantic models)
- Do NOT depend on HTTP request/response objects
- Write only the scheduling outputs of encounters and blocks
"""
