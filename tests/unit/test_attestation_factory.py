"""
Unit tests for verifier selection.
"""

from unittest.mock import Mock, patch

from wordgate.config import Settings
from wordgate.services.attestation import (
    AppAttestChainVerifier,
    AssuranceLevel,
    FormatAttestationVerifier,
    build_verifier,
)


class TestBuildVerifier:
    """Test cases for build_verifier."""

    def test_format_verifier_by_default(self):
        settings = Settings(jwt_secret_key="x" * 32, attestation_min_token_length=120)

        verifier = build_verifier(settings)

        assert isinstance(verifier, FormatAttestationVerifier)
        assert verifier.min_token_length == 120
        assert verifier.min_decoded_length == 50

    @patch.object(AppAttestChainVerifier, "from_pem_file")
    def test_chain_verifier(self, mock_from_pem):
        """Chain verification loads the pinned root and passes the app id through."""
        mock_verifier = Mock()
        mock_verifier.get_verifier_type.return_value = "appattest"
        mock_verifier.assurance = AssuranceLevel.CHAIN
        mock_from_pem.return_value = mock_verifier

        settings = Settings(
            jwt_secret_key="x" * 32,
            attestation_verifier="chain",
            app_attest_app_id="TEAM.com.example.imposter",
            app_attest_root_ca_path="/etc/wordgate/apple_root.pem",
            app_attest_allow_development=True,
        )

        verifier = build_verifier(settings)

        assert verifier is mock_verifier
        mock_from_pem.assert_called_once_with(
            "/etc/wordgate/apple_root.pem",
            "TEAM.com.example.imposter",
            allow_development=True,
            min_token_length=100,
            min_decoded_length=50,
        )
