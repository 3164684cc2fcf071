"""
Tests for project setup validation
"""
import os
import importlib.util
import tomllib

import pytest
from hypothesis import given, strategies as st


class TestProjectSetup:
    """Test project structure and dependencies are properly configured"""

    def test_required_directories_exist(self):
        """Test that all required directories exist"""
        for dir_name in ['models', 'services', 'api', 'tests', 'utils']:
            assert os.path.isdir(dir_name), f"Required directory '{dir_name}' does not exist"

    def test_init_files_exist(self):
        """Test that __init__.py files exist in all Python packages"""
        for init_file in ['models/__init__.py', 'services/__init__.py', 'api/__init__.py',
                          'tests/__init__.py', 'utils/__init__.py']:
            assert os.path.exists(init_file), f"Required __init__.py file '{init_file}' does not exist"

    def test_pyproject_declares_core_dependencies(self):
        """Test that pyproject.toml declares the runtime and test dependencies"""
        with open('pyproject.toml', 'rb') as f:
            project = tomllib.load(f)["project"]

        declared = " ".join(project["dependencies"])
        for package in ['fastapi', 'pydantic-settings', 'requests', 'PyPDF2', 'boto3', 'psutil', 'python-multipart']:
            assert package in declared, f"Required package '{package}' not declared"

        test_extra = " ".join(project["optional-dependencies"]["test"])
        for package in ['pytest', 'hypothesis', 'httpx']:
            assert package in test_extra, f"Test package '{package}' not declared"

    def test_config_module_importable(self):
        """Test that configuration module can be imported"""
        import config
        assert hasattr(config, 'settings'), "Config module should have 'settings' attribute"

    def test_main_application_exists(self):
        """Test that main application file exists and is importable"""
        spec = importlib.util.spec_from_file_location("main", "main.py")
        main_module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(main_module)
        assert hasattr(main_module, 'app'), "main.py should define 'app' variable"
        assert hasattr(main_module, 'create_app'), "main.py should define the 'create_app' factory"

    @given(st.text(min_size=1, max_size=100, alphabet=st.characters(blacklist_categories=('Cs',), blacklist_characters=['\x00'])))
    def test_environment_variable_handling(self, test_value):
        """Property test: unrelated environment variables do not break settings"""
        from config import Settings

        test_key = "TEST_CONFIG_VALUE"
        original_value = os.environ.get(test_key)

        try:
            os.environ[test_key] = test_value
            settings = Settings()
            assert hasattr(settings, 'log_level')
        finally:
            if original_value is not None:
                os.environ[test_key] = original_value
            elif test_key in os.environ:
                del os.environ[test_key]

    def test_settings_cover_the_pipeline(self):
        """Test that configuration supports every pipeline stage"""
        from config import settings

        for name in ['s3_bucket', 's3_region', 'gemini_api_key', 'gemini_model',
                     'max_file_size_mb', 'cleanup_orphaned_documents', 'request_timeout_seconds']:
            assert hasattr(settings, name), f"Config should define '{name}'"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
