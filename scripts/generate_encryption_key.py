# scripts/generate_encryption_key.py
"""Print a new base64 master key for ENCRYPTION_KEY"""
from recordguard.core.keys import generate_encryption_key

if __name__ == "__main__":
    print(generate_encryption_key())
