"""Constants for the Nutanix Cluster Operator."""

# API Group
API_GROUP = "infrastructure.cluster.x-k8s.io"
API_VERSION = "v1beta1"
API_GROUP_VERSION = f"{API_GROUP}/{API_VERSION}"

# Resource Kinds
KIND_NUTANIX_CLUSTER = "NutanixCluster"
KIND_SECRET = "Secret"
KIND_CONFIG_MAP = "ConfigMap"

PLURAL_NUTANIX_CLUSTERS = "nutanixclusters"

# Trust bundle kinds
TRUST_BUNDLE_KIND_CONFIG_MAP = "ConfigMap"
TRUST_BUNDLE_KIND_STRING = "String"

# Annotations
ANNOTATION_PAUSED = "cluster.x-k8s.io/paused"

# Finalizers
FINALIZER_CLUSTER = f"{API_GROUP}/nutanixcluster"
CREDENTIAL_FINALIZER_SUFFIX = "nutanixcluster-credential"
# Shared by every cluster; replaced by per-cluster tokens
DEPRECATED_CREDENTIAL_FINALIZER = f"{API_GROUP}/{CREDENTIAL_FINALIZER_SUFFIX}"

# Field Manager
FIELD_MANAGER = "nutanix-cluster-operator"

# Secret / ConfigMap keys
CREDENTIALS_SECRET_KEY = "credentials"
TRUST_BUNDLE_CONFIG_MAP_KEY = "ca.crt"
CREDENTIAL_TYPE_BASIC_AUTH = "basic_auth"

# Prism Central
DEFAULT_PRISM_PORT = 9440
PRISM_API_PATH = "/api/nutanix/v3"

# Task statuses
TASK_STATUS_SUCCEEDED = "SUCCEEDED"
TASK_STATUS_FAILED = "FAILED"
TASK_STATUS_INVALID_UUID = "INVALID_UUID"

# Condition Types
COND_READY = "Ready"
COND_FAILURE_DOMAINS_RECONCILED = "FailureDomainsReconciled"
COND_NO_FAILURE_DOMAINS_RECONCILED = "NoFailureDomainsReconciled"
COND_CREDENTIAL_REF_SECRET_OWNER_SET = "CredentialRefSecretOwnerSet"
COND_TRUST_BUNDLE_SECRET_OWNER_SET = "TrustBundleSecretOwnerSet"
COND_PRISM_CENTRAL_CLIENT_INITIALIZED = "PrismCentralClientInitialized"

# Condition Reasons
REASON_CREDENTIAL_REF_SECRET_OWNER_SET_FAILED = "CredentialRefSecretOwnerSetFailed"
REASON_TRUST_BUNDLE_SECRET_OWNER_SET_FAILED = "TrustBundleSecretOwnerSetFailed"
REASON_PRISM_CENTRAL_CLIENT_INITIALIZATION_FAILED = "PrismCentralClientInitializationFailed"

# Event Reasons
EVENT_REASON_RECONCILE_STARTED = "ReconcileStarted"
EVENT_REASON_RECONCILE_FAILED = "ReconcileFailed"
EVENT_REASON_REFERENCE_FINALIZER_ADDED = "ReferenceFinalizerAdded"
EVENT_REASON_REFERENCE_FINALIZER_REMOVED = "ReferenceFinalizerRemoved"
EVENT_REASON_FAILURE_DOMAINS_RECONCILED = "FailureDomainsReconciled"

# Requeue delays (seconds)
CONFLICT_RETRY_DELAY = 1.0
DANGLING_REFERENCE_RETRY_DELAY = 30.0
