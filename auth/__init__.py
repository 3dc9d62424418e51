"""auth/ -- Credential authentication core for authgate.

Components, leaf first:
  passwords.PasswordHasher     bcrypt hash/verify
  store.CredentialStore        identities keyed by unique email
  tokens.TokenIssuer           signed 24h session tokens
  cookies.SessionCookieCodec   token <-> cookie directive
  guard.AuthGuard              cookie -> Principal, or reject
  service.AuthService          signup / signin / check / logout

Layer rule: auth/ imports only stdlib, third-party libraries and core/.
It does NOT import from api/. api/ imports from auth/, not the other way around.
"""
