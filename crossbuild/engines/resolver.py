"""Select the container engine for a run.

:func:`resolve_engine` is the only entry point. Explicit tokens are looked up
on ``PATH`` (or, for Kubernetes, checked against the cluster); the empty
token triggers autodetection.

Autodetection probes a single fixed path, ``/usr/bin/docker``, and matches
its ``--version`` output. Some distributions install ``podman-docker``, which
places a ``docker`` shim in front of Podman; the shim's version string names
Podman, so one probe disambiguates both cases. Non-standard install paths
and localised version strings are not recognised.
"""

from __future__ import annotations

import structlog

from crossbuild.utils import process
from crossbuild.utils.errors import (
    Cancelled,
    ClusterUnreachable,
    CommandFailed,
    EngineDetectionFailed,
    EngineNotFound,
    UnsupportedEngine,
)

from .base import (
    AUTODETECT_ENGINE,
    DOCKER_ENGINE,
    ENGINE_TOKENS,
    KUBERNETES_ENGINE,
    PODMAN_ENGINE,
    Engine,
)

log = structlog.get_logger()

#: Binary probed during autodetection.
AUTODETECT_BINARY = "/usr/bin/docker"

#: Seconds allowed for the cluster connectivity probe.
CLUSTER_PROBE_TIMEOUT = 10


def check_cluster() -> None:
    """Verify that ``kubectl`` can reach the configured cluster.

    Raises:
        ClusterUnreachable: ``kubectl`` is missing or the API server did not
            answer.
    """
    kubectl = process.lookup_executable("kubectl")
    if kubectl is None:
        raise ClusterUnreachable("kubectl binary not found in PATH")
    try:
        process.run_command(
            [kubectl, "version", "--request-timeout=5s"],
            timeout=CLUSTER_PROBE_TIMEOUT,
        )
    except CommandFailed as exc:
        raise ClusterUnreachable(exc.stderr.strip() or str(exc)) from exc
    except Cancelled as exc:
        # A stalled API server or credential plugin hits the probe timeout.
        raise ClusterUnreachable(str(exc)) from exc


def _lookup(name: str) -> Engine:
    binary = process.lookup_executable(name)
    if not binary:
        raise EngineNotFound(name)
    return Engine(name=name, binary=binary)


def _autodetect() -> Engine:
    try:
        result = process.run_command([AUTODETECT_BINARY, "--version"])
    except CommandFailed as exc:
        raise EngineDetectionFailed(exc.stdout or exc.stderr) from exc

    out = result.stdout.lower()
    # Order matters: a real Docker prints "Docker version ..." whereas the
    # podman-docker shim prints "podman version ...".
    if DOCKER_ENGINE in out:
        return Engine(name=DOCKER_ENGINE, binary=AUTODETECT_BINARY)
    if PODMAN_ENGINE in out:
        return Engine(name=PODMAN_ENGINE, binary=AUTODETECT_BINARY)
    raise EngineDetectionFailed(result.stdout)


def resolve_engine(requested: str = AUTODETECT_ENGINE) -> Engine:
    """Return the :class:`Engine` for *requested*.

    Args:
        requested: ``"docker"``, ``"podman"``, ``"kubernetes"`` or ``""`` to
            autodetect. Matching is case-sensitive.

    Returns:
        The resolved engine. For explicit tokens ``engine.name`` always
        equals *requested*.

    Raises:
        EngineNotFound: The requested binary is not on ``PATH``.
        ClusterUnreachable: The Kubernetes cluster could not be contacted.
        EngineDetectionFailed: Autodetection did not recognise the engine.
        UnsupportedEngine: *requested* is not a known token.
    """
    if requested not in ENGINE_TOKENS:
        raise UnsupportedEngine(requested)

    if requested == AUTODETECT_ENGINE:
        engine = _autodetect()
    elif requested == KUBERNETES_ENGINE:
        check_cluster()
        engine = Engine(name=KUBERNETES_ENGINE, binary="")
    else:
        engine = _lookup(requested)

    log.info("engine.resolved", requested=requested, name=engine.name, binary=engine.binary)
    return engine
