"""Envelope encryption for hashed identifier values.

A local data-encryption key (DEK) seals each value with Tink's
XChaCha20-Poly1305 AEAD.  The DEK itself only leaves the process wrapped by
a remote key-encryption key (KEK), so a downstream party with KEK access can
recover it.

Modules
-------
kms         KMS clients (Tink Cloud KMS, in-process AES-GCM)
envelope    ``EnvelopeKeyManager``: owns the DEK primitive and the wrapped DEK
encryptor   ``Encryptor``: seals strings under the DEK
"""
