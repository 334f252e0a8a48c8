#!/usr/bin/env python3
"""Tests for setup project rewriting."""

from srcexport.transforms.setup_project import SetupProjectTransform

VDPROJ = (
    '"DeployProject"\r\n'
    "{\r\n"
    '"VSVersion" = "3:800"\r\n'
    '    "SccProjectName" = "8:SAK"\r\n'
    '    "SccLocalPath" = "8:SAK"\r\n'
    '    "SccAuxPath" = "8:SAK"\r\n'
    '    "SccProvider" = "8:SAK"\r\n'
    '"ProjectType" = "8:{978C614F-708E-4E1A-B201-565925725DBA}"\r\n'
    "}\r\n"
).encode("utf-8")


class TestSetupProjectTransform:
    """Tests for SetupProjectTransform."""

    def test_supports_vdproj(self):
        """Test only setup projects are handled."""
        transform = SetupProjectTransform()

        assert transform.supports("Setup.vdproj")
        assert not transform.supports("Setup.vcproj")

    def test_disabled_without_scm_removal(self):
        """Test content is kept when bindings are kept."""
        transform = SetupProjectTransform(remove_scm_binding=False)
        result = transform.apply(VDPROJ, "Setup.vdproj")

        assert not transform.enabled
        assert result.content == VDPROJ
        assert result.skipped is True

    def test_removes_scm_lines(self):
        """Test quoted SCM properties are dropped."""
        result = SetupProjectTransform(remove_scm_binding=True).apply(VDPROJ, "Setup.vdproj")
        text = result.content.decode("utf-8")

        assert result.success
        assert "Scc" not in text
        assert '"VSVersion" = "3:800"\r\n' in text
        assert '"ProjectType"' in text

    def test_unquoted_names_kept(self):
        """Test only quoted property names are matched."""
        content = b"SccProjectName = 1\n"
        result = SetupProjectTransform(remove_scm_binding=True).apply(content, "Setup.vdproj")

        assert result.content == content
