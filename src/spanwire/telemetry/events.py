"""Semantic event constants for structured logging.

All log events should use these constants rather than magic strings to ensure
consistency and enable reliable querying and analysis.
"""

# Tracer lifecycle events
TRACER_CREATED = "tracer_created"
TRACER_CLEARED = "tracer_cleared"
TRACER_DIAGNOSTIC = "tracer_diagnostic"

# Span events
SPAN_STARTED = "span_started"
SPAN_FINISHED = "span_finished"
SPAN_REPORTED = "span_reported"

# Propagation events
CARRIER_INJECTED = "carrier_injected"
CARRIER_EXTRACTED = "carrier_extracted"

# Transport adapter events
INBOUND_SPAN_STARTED = "inbound_span_started"
INBOUND_CONTEXT_REJECTED = "inbound_context_rejected"
OUTBOUND_SPAN_STARTED = "outbound_span_started"
TRACED_CALL_FAILED = "traced_call_failed"

# Configuration events
SETTINGS_LOADING = "settings_loading"
SETTINGS_LOADED = "settings_loaded"
SETTINGS_LOAD_FAILED = "settings_load_failed"
ENV_FILES_LOADED = "env_files_loaded"
