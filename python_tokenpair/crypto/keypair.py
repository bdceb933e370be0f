"""RSA key pair generation and self-validation."""

import os
import secrets
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa
from cryptography.hazmat.backends import default_backend
from python_tokenpair.errors import KeyGenerationError, KeyValidationError
from python_tokenpair.models import KeyPair


PUBLIC_EXPONENT = 65537
PASSPHRASE_BYTES = 32
VALIDATION_MESSAGE_BYTES = 32


def generate_passphrase() -> str:
    """Return 256 bits of randomness as a hex string."""
    return secrets.token_hex(PASSPHRASE_BYTES)


def generate_pem_keys(modulus_length: int, passphrase: str) -> tuple[str, str]:
    """Generate an RSA key pair and return (public_pem, encrypted_private_pem)."""
    private_key = rsa.generate_private_key(
        public_exponent=PUBLIC_EXPONENT,
        key_size=modulus_length,
        backend=default_backend()
    )
    
    # PKCS#8 encrypted under the passphrase
    private_pem = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.BestAvailableEncryption(passphrase.encode('utf-8'))
    ).decode('utf-8')
    
    public_pem = private_key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo
    ).decode('utf-8')
    
    return public_pem, private_pem


def sign_message(private_pem: str, passphrase: str, message: bytes) -> bytes:
    """Sign message with an encrypted PEM private key (PKCS#1 v1.5, SHA-256)."""
    private_key = serialization.load_pem_private_key(
        private_pem.encode('utf-8'),
        password=passphrase.encode('utf-8'),
        backend=default_backend()
    )
    if not isinstance(private_key, rsa.RSAPrivateKey):
        raise ValueError("not an RSA private key")
    return private_key.sign(message, padding.PKCS1v15(), hashes.SHA256())


def verify_message(public_pem: str, message: bytes, signature: bytes) -> bool:
    """Verify a signature over message with a PEM public key."""
    public_key = serialization.load_pem_public_key(public_pem.encode('utf-8'))
    if not isinstance(public_key, rsa.RSAPublicKey):
        raise ValueError("not an RSA public key")
    try:
        public_key.verify(signature, message, padding.PKCS1v15(), hashes.SHA256())
        return True
    except InvalidSignature:
        return False


def validate_key_pair(public_pem: str, private_pem: str, passphrase: str) -> None:
    """Prove the pair works by signing a random message and verifying it.
    
    Raises KeyValidationError on a mismatch or on any failure while
    loading, signing or verifying.
    """
    message = os.urandom(VALIDATION_MESSAGE_BYTES)
    try:
        signature = sign_message(private_pem, passphrase, message)
        valid = verify_message(public_pem, message, signature)
    except Exception as e:
        raise KeyValidationError("key pair validation failed", cause=e) from e
    
    if not valid:
        raise KeyValidationError("signature did not verify against public key")


class KeyPairGenerator:
    """Produces one validated KeyPair per call."""
    
    def generate(self, key_type: str, modulus_length: int) -> KeyPair:
        """Generate, encrypt and validate a key pair for key_type."""
        passphrase = generate_passphrase()
        
        try:
            public_pem, private_pem = generate_pem_keys(modulus_length, passphrase)
        except Exception as e:
            raise KeyGenerationError(f"{key_type} key generation failed", cause=e) from e
        
        # Never hand back a pair that has not signed and verified
        validate_key_pair(public_pem, private_pem, passphrase)
        
        return KeyPair(public_key=public_pem, private_key=private_pem, passphrase=passphrase)
