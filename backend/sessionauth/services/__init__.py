"""Service layer.

Subpackages
-----------
- :mod:`.tokens`: :class:`TokenService`, access-token signing/verification and
  refresh-token issuance, claim and revocation.
- :mod:`.activation`: :class:`ActivationService`, single-use email activation tokens.
- :mod:`.admission`: :class:`AdmissionService`, request admission decisions.
- :mod:`.sessions`: :class:`SessionManager`, session creation, rotation and logout.
- :mod:`.accounts`: :class:`AccountService`, registration, login, activation and
  user maintenance.

Import services from their subpackages; nothing is re-exported here.
"""
