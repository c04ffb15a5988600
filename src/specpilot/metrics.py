from prometheus_client import Counter

provider_calls_total = Counter(
    "specpilot_provider_calls_total",
    "Number of text-generation provider calls",
    ["provider", "task", "outcome"],
)

provider_fallbacks_total = Counter(
    "specpilot_provider_fallbacks_total",
    "Number of times a request fell back to the secondary provider",
    ["task"],
)

spec_validation_warnings_total = Counter(
    "specpilot_spec_validation_warnings_total",
    "Number of specifications that did not start with the expected marker",
)

codegen_jobs_submitted_total = Counter(
    "specpilot_codegen_jobs_submitted_total",
    "Number of code generation jobs submitted",
    ["target"],
)

codegen_status_checks_total = Counter(
    "specpilot_codegen_status_checks_total",
    "Number of code generation job status checks",
    ["outcome"],
)
