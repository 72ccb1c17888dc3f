"""Remote model access package.

Architectural role:
    Provides provider configuration, HTTP transports and the stateful conversation
    client used by the router to escalate messages the knowledge base cannot answer.

Module split:
    - `provider_config`: environment-driven provider, model and credential settings.
    - `client`: provider-specific HTTP transport and error classification.
    - `remote_client`: rolling conversation window plus sequential model failover.
"""
