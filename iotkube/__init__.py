"""Prepare edge and IoT nodes over SSH and run kubeadm init on them."""

__version__ = "0.1.0"
__all__ = ["__version__"]