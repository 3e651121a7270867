"""SpaceProof setup - hash-chained receipts for orbital hardware verification."""
from setuptools import setup, find_packages

setup(
    name="spaceproof",
    version="1.0.0",
    description="SpaceProof: tamper-evident receipt ledger with dual-hash Merkle anchoring",
    packages=find_packages(include=["spaceproof", "spaceproof.*", "spaceproof_cli", "spaceproof_cli.*"]),
    python_requires=">=3.10",
    install_requires=[
        "blake3>=0.3",
        "click>=8.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "spaceproof=spaceproof_cli.main:cli",
        ],
    },
)
