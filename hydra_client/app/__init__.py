"""
Hydra consent client package.

The client talks to a single Hydra provider on behalf of a consent app:
- Authentication: client-credentials access token, cached until expiry
- Keys: JWKs fetched from Hydra's key sets with the bearer token
- Consent: challenge verification and consent response signing

Structure:
- app.client: HydraClient facade wiring the components together.
- app.auth: TokenStore and the client-credentials Authenticator.
- app.jwks: KeyFetcher for /keys/{set}/{kid}.
- app.consent: ConsentVerifier, ConsentSigner and JWK key reconstruction.
- app.models: AccessToken and JWK types.
"""
