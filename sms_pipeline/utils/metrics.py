"""Prometheus metrics definitions"""

from prometheus_client import Counter, Histogram, Gauge


# Pipeline flow metrics
messages_received = Counter(
    'sms_messages_received_total',
    'Inbound SMS messages handed to the coordinator'
)

messages_filtered = Counter(
    'sms_messages_filtered_total',
    'Messages rejected by the preprocessor',
    labelnames=['reason']  # sensitive_keyword, otp_pattern, non_transactional
)

extractions_total = Counter(
    'sms_extractions_total',
    'Candidate records produced, by extractor tier',
    labelnames=['extractor']
)

extraction_misses = Counter(
    'sms_extraction_misses_total',
    'Extractor calls that returned no candidate',
    labelnames=['extractor']
)

extractor_timeouts = Counter(
    'sms_extractor_timeouts_total',
    'Extractor calls abandoned after their timeout',
    labelnames=['extractor']
)

extraction_latency = Histogram(
    'sms_extraction_latency_seconds',
    'Latency of a single extractor call',
    labelnames=['extractor'],
    buckets=[0.001, 0.01, 0.1, 0.5, 1, 2, 5, 10]
)

# Reconciliation metrics
accounts_matched = Counter(
    'sms_accounts_matched_total',
    'Account matcher results',
    labelnames=['rule']  # tail_single, tail_hint, tail_first, bank_hint, keyword, none
)

low_value_tagged = Counter(
    'sms_low_value_tagged_total',
    'Transactions auto-tagged below the low-value threshold'
)

# Worker metrics
worker_results = Counter(
    'sms_worker_results_total',
    'Per-message worker outcomes',
    labelnames=['status']  # stored, skipped, duplicate, retry
)

cloud_extractor_available = Gauge(
    'sms_cloud_extractor_available',
    'Whether the cloud extractor initialized (0/1)'
)

# LLM cost & usage tracking
llm_tokens_counter = Counter(
    'llm_tokens_used_total',
    'Total LLM tokens consumed',
    labelnames=['model_name']
)

llm_cost_counter = Counter(
    'llm_cost_dollars_total',
    'Total LLM cost in USD',
    labelnames=['model_name']
)

llm_api_latency = Histogram(
    'llm_api_latency_seconds',
    'Latency of LLM API calls',
    labelnames=['model_name'],
    buckets=[0.5, 1, 2, 5, 10, 30]
)

# Infrastructure metrics
redis_connection_healthy = Gauge(
    'redis_connection_healthy',
    'Whether Redis (transaction store) is alive (0/1)'
)
