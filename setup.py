from setuptools import setup, find_packages

setup(
    name="agencyos-qa",
    version="0.1.0",
    description="Verificacoes operacionais do AgencyOS - cenarios de UI com Playwright e checks do Supabase",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.10",
    install_requires=[
        "httpx>=0.25.0",
        "python-dotenv>=1.0.0",
        "playwright>=1.40.0",
        "supabase>=2.4.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.21.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "agencyos-qa=agencyos_qa.cli:main",
        ],
    },
)
