"""Names of the core services every store node is wired to."""

REDIS = "redis"
EVENT_BUS = "eventbus"
POSTGRES = "postgres"
CATALOG_DB = "catalogdb"
IDENTITY_DB = "identitydb"
ORDERING_DB = "orderingdb"
WEBHOOKS_DB = "webhooksdb"
IDENTITY_API = "identity-api"
BASKET_API = "basket-api"
CATALOG_API = "catalog-api"
ORDERING_API = "ordering-api"
ORDER_PROCESSOR = "order-processor"
PAYMENT_PROCESSOR = "payment-processor"
WEBHOOKS_API = "webhooks-api"
MOBILE_BFF = "mobile-bff"
WEBHOOKS_CLIENT = "webhooksclient"
WEBAPP = "webapp"

# Peers a store container calls directly
STORE_PEERS = (BASKET_API, CATALOG_API, ORDERING_API)
