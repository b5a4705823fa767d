"""
Multi-provider model-request adapter.

Components, leaf-first:
- model_table: logical model keys -> provider family, wire name, capability flags
- prompt_builder: data serialization, truncation, template substitution
- request_normalizer: capability flags -> provider call payload
- invoker: single async outbound call with timeout and failure classification
- errors: ErrorKind taxonomy and user-facing translation
"""
