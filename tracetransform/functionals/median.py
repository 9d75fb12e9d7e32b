"""Streaming weighted median shared by the anchored functionals."""

import torch


def weighted_median(data, sqrt=False, prescan=None, out=None):
    """Find the weighted median position of traces.

    The weighted median is the first position where twice the running sum of
    the weights reaches or exceeds the total weight. When no position
    qualifies (e.g. negative totals) position 0 is returned.

    Parameters
    ----------
    data : torch.Tensor
        A single trace of shape (n,) or a batch of traces of shape (n, m),
        one trace per column. The samples are the weights.
    sqrt : bool, optional
        Weigh every sample by its square root instead of its value.
    prescan : torch.Tensor, optional
        Preallocated buffer of the shape of `data` receiving the running sum.
    out : torch.Tensor, optional
        Preallocated int64 buffer of shape (m,) receiving the positions.

    Returns
    -------
    torch.Tensor
        Position of the weighted median, 0-d for a single trace, shape (m,)
        for a batch.

    Examples
    --------
    >>> weighted_median(torch.tensor([0., 0., 4., 0., 0.]))
    tensor(2)
    >>> weighted_median(torch.tensor([1., 1., 1., 1.]))
    tensor(1)
    """
    weights = torch.sqrt(data) if sqrt else data
    if prescan is None:
        prescan = torch.cumsum(weights, dim=0)
    else:
        torch.cumsum(weights, dim=0, out=prescan)
    reached = (2 * prescan >= prescan[-1:]).to(torch.int32)
    # argmax yields the first maximal position, and 0 for an all-false column
    if out is None:
        return torch.argmax(reached, dim=0)
    return torch.argmax(reached, dim=0, out=out)


def weighted_median_of(values, weights, extracted=None, indices=None, permuted=None,
                       prescan=None, out=None):
    """Weighted median of `values` where each value carries its own weight.

    Values are sorted along the first dimension, the weights are gathered in
    the sorted order and the weighted median position of the permuted weights
    selects the result.

    Parameters
    ----------
    values : torch.Tensor
        Samples of shape (n, m), one set per column.
    weights : torch.Tensor
        Non-negative weights of the shape of `values`.
    extracted, indices, permuted : torch.Tensor, optional
        Preallocated buffers for the sorted values, the sort permutation and
        the permuted weights.
    prescan, out : torch.Tensor, optional
        Preallocated buffers passed on to `weighted_median`.

    Returns
    -------
    torch.Tensor
        The weighted median value of every column, shape (m,).
    """
    if extracted is None:
        extracted, indices = torch.sort(values, dim=0, stable=True)
    else:
        torch.sort(values, dim=0, stable=True, out=(extracted, indices))
    if permuted is None:
        permuted = torch.gather(weights, 0, indices)
    else:
        torch.gather(weights, 0, indices, out=permuted)
    median = weighted_median(permuted, prescan=prescan, out=out)
    return extracted.gather(0, median.unsqueeze(0)).squeeze(0)
