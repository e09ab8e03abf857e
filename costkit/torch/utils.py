"""Utility functions for PyTorch integration with costkit."""

from __future__ import annotations

from typing import Optional

import numpy as np
import torch


def infer_device(device: Optional[torch.device | str]) -> torch.device:
    """
    Infer the PyTorch device to use.

    Parameters
    ----------
    device:
        Optional PyTorch device or device string. If None, uses the CPU.

    Returns
    -------
    torch.device
        The device to use for computation.
    """
    if device is None:
        return torch.device("cpu")
    return torch.device(device)


def as_float_tensor(
    x: np.ndarray, device: Optional[torch.device] = None, requires_grad: bool = False
) -> torch.Tensor:
    """
    Copy a numpy vector into a float64 tensor on the specified device.

    Parameters
    ----------
    x:
        Input array.
    device:
        Optional device. If None, uses infer_device().
    requires_grad:
        Whether autograd should track the returned leaf tensor.

    Returns
    -------
    torch.Tensor
        Tensor with dtype torch.float64 on the specified device.
    """
    target_device = infer_device(device)
    return torch.tensor(
        np.asarray(x, dtype=float),
        dtype=torch.float64,
        device=target_device,
        requires_grad=requires_grad,
    )


def as_scalar(value: torch.Tensor) -> torch.Tensor:
    """
    Check that an objective returned a single-element tensor and squeeze it.

    Raises
    ------
    TypeError
        If value is not a torch.Tensor.
    ValueError
        If value holds more than one element.
    """
    if not isinstance(value, torch.Tensor):
        raise TypeError(f"objective must return a torch.Tensor, got {type(value).__name__}")
    if value.numel() != 1:
        raise ValueError(
            f"objective must return a scalar tensor, got shape {tuple(value.shape)}"
        )
    return value.reshape(())


__all__ = ["as_float_tensor", "as_scalar", "infer_device"]
