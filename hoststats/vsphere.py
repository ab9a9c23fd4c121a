"""
vSphere session factory and host collector.

Talks to vCenter Server or standalone ESXi through the vSphere Web Services
API (pyVmomi). For every HostSystem in the inventory one HostStat record is
produced from the host summary, its product information and its parent
(cluster or compute resource) name.
"""

import socket
from dataclasses import dataclass
from typing import Any, List

from pyVim.connect import Disconnect, SmartConnect
from pyVmomi import vim, vmodl

from hoststats.config import EndpointDefinition
from hoststats.errors import (
    CollectionError,
    DisconnectWarning,
    EndpointConnectionError,
    ErrorCode,
)
from hoststats.interfaces.collector import HostCollectorInterface, SessionFactoryInterface
from hoststats.records import HostStat


@dataclass
class VSphereSession:
    """An authenticated ServiceInstance bound to the endpoint it came from."""
    endpoint: EndpointDefinition
    service_instance: Any

    @property
    def name(self) -> str:
        return self.endpoint.identity


class VSphereSessionFactory(SessionFactoryInterface):
    """Opens vSphere API sessions with SmartConnect.

    Attributes:
        logger: Logger instance for output.
    """

    def __init__(self, logger):
        self.logger = logger

    def connect(self, endpoint: EndpointDefinition) -> VSphereSession:
        self.logger.debug(f"Connecting to {endpoint.identity} as {endpoint.username or '<none>'}")
        try:
            service_instance = SmartConnect(
                host=endpoint.hostname,
                user=endpoint.username,
                pwd=endpoint.password,
                port=endpoint.port,
                disableSslCertValidation=endpoint.insecure,
            )
        except vim.fault.InvalidLogin as e:
            raise EndpointConnectionError(
                "Authentication rejected",
                endpoint=endpoint.identity,
                cause=getattr(e, 'msg', None) or str(e),
                code=ErrorCode.CONNECT_AUTH_FAILED
            ) from e
        except socket.gaierror as e:
            raise EndpointConnectionError(
                "Could not resolve endpoint address",
                endpoint=endpoint.identity,
                cause=str(e),
                code=ErrorCode.CONNECT_INVALID_ADDRESS
            ) from e
        except Exception as e:
            raise EndpointConnectionError(
                "Could not connect to endpoint",
                endpoint=endpoint.identity,
                cause=getattr(e, 'msg', None) or str(e),
                code=ErrorCode.CONNECT_UNREACHABLE
            ) from e

        return VSphereSession(endpoint=endpoint, service_instance=service_instance)

    def disconnect(self, session: VSphereSession) -> None:
        try:
            Disconnect(session.service_instance)
        except Exception as e:
            raise DisconnectWarning(
                "Logout failed",
                endpoint=session.name,
                cause=str(e)
            ) from e


class VSphereHostCollector(HostCollectorInterface):
    """Collects one HostStat per HostSystem visible to the session.

    A failure while enumerating hosts or resolving the cluster of any host
    fails the whole endpoint.
    """

    def __init__(self, logger):
        self.logger = logger

    def get_collection_method(self) -> str:
        return "vsphere"

    def collect(self, session: VSphereSession) -> List[HostStat]:
        try:
            content = session.service_instance.RetrieveContent()
            view = content.viewManager.CreateContainerView(
                content.rootFolder, [vim.HostSystem], True
            )
        except Exception as e:
            raise CollectionError(
                "Could not create HostSystem view",
                endpoint=session.name,
                cause=getattr(e, 'msg', None) or str(e),
                code=ErrorCode.COLLECT_DISCOVERY_FAILED
            ) from e

        try:
            hosts = list(view.view)
            self.logger.debug(f"{session.name}: {len(hosts)} hosts in inventory")
            return [self._host_stat(session, host) for host in hosts]
        finally:
            try:
                view.Destroy()
            except Exception as e:
                self.logger.debug(f"{session.name}: could not destroy container view: {e}")

    def _host_stat(self, session: VSphereSession, host) -> HostStat:
        host_name = getattr(host, 'name', None) or str(host)
        try:
            cluster = host.parent.name
        except Exception as e:
            raise CollectionError(
                f"Could not resolve cluster of host {host_name}",
                endpoint=session.name,
                cause=getattr(e, 'msg', None) or str(e),
                host=host_name,
                code=ErrorCode.COLLECT_LOOKUP_FAILED
            ) from e

        try:
            summary = host.summary
            hardware = summary.hardware
            quick_stats = summary.quickStats
            product = host.config.product
            system_info = host.hardware.systemInfo

            return HostStat.from_usage(
                cluster=cluster,
                host=summary.config.name,
                version=product.version,
                build=product.build,
                vendor=system_info.vendor,
                model=system_info.model,
                num_cpu_pkgs=hardware.numCpuPkgs,
                num_cpu_cores=hardware.numCpuCores,
                num_cpu_threads=hardware.numCpuThreads,
                cpu_model=hardware.cpuModel,
                cpu_mhz=hardware.cpuMhz,
                cpu_usage_mhz=quick_stats.overallCpuUsage or 0,
                memory_size=hardware.memorySize,
                # quickStats reports memory usage in MB, hardware.memorySize in bytes
                memory_usage=quick_stats.overallMemoryUsage or 0,
                memory_usage_unit='MB',
            )
        except (AttributeError, TypeError, ValueError, vmodl.MethodFault) as e:
            raise CollectionError(
                f"Could not read properties of host {host_name}",
                endpoint=session.name,
                cause=getattr(e, 'msg', None) or str(e),
                host=host_name,
                code=ErrorCode.COLLECT_DISCOVERY_FAILED
            ) from e
