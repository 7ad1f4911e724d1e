from setuptools import setup, find_packages

setup(
    name='file-storage',
    version='0.1.0',
    description='Bucket based file storage abstraction for local and Azure Blob storage',
    packages=find_packages(where='src'),
    package_dir={'': 'src'},
    install_requires=[
        'aiofiles>=23.1',
        'azure-storage-blob[aio]>=12.19',
        'azure-identity>=1.15',
        'pydantic>=2.5',
        'pydantic-settings>=2.1',
        'python-dotenv>=1.0',
    ],
    extras_require={
        'test': [
            'pytest>=7.4',
            'pytest-asyncio>=0.23',
        ],
    },
    python_requires='>=3.8',
)
