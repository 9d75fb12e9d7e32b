"""Trace extraction along projection lines.

A trace is the ordered sequence of image samples along one projection line.
`TraceIterator` walks a single segment and can be re-anchored onto another
segment of the same image; `extract_traces` produces every vertical trace of a
rotated image at once, which is what the sinogram generator reduces.
"""

import torch

from .functionals.median import weighted_median
from .geometry import Point, Segment, vertical_segment


class TraceIterator:
    """Restartable cursor over the samples of a segment.

    The segment is walked one unit step at a time along its major axis,
    sampling the pixel nearest to each step. Index 0 corresponds to
    `segment.start` and the last index to `segment.end`.

    Parameters
    ----------
    image : torch.Tensor
        Image of shape (rows, cols), typically a rotated padded image.
    segment : Segment
        Line to walk, in image coordinates (x = column, y = row).

    Examples
    --------
    >>> it = TraceIterator(image, Segment(Point(2, 0), Point(2, 4)))
    >>> while it.has_next():
    ...     total += it.value()
    ...     it.next()
    """

    def __init__(self, image, segment):
        self._image = image
        self._segment = Segment(Point(*segment.start), Point(*segment.end))
        steps = self._segment.steps()
        self._length = steps + 1
        if steps > 0:
            self._step = self._segment.delta.scale(1.0 / steps)
        else:
            self._step = Point(0.0, 0.0)
        self._index = 0

    @property
    def segment(self):
        return self._segment

    @property
    def image(self):
        return self._image

    def __len__(self):
        return self._length

    def __iter__(self):
        for index in range(self._length):
            yield self._sample(self.point_at(index))

    def point_at(self, index):
        """Image coordinate of the sample at `index`."""
        return self._segment.start + self._step.scale(index)

    def has_next(self):
        return self._index < self._length

    def next(self):
        self._index += 1

    def value(self):
        return self._sample(self.point())

    def point(self):
        return self.point_at(self._index)

    def to_front(self):
        self._index = 0

    def transform_domain(self, segment):
        """Iterate the same image along `segment` instead.

        Parameters
        ----------
        segment : Segment
            New domain. Position 0 of the returned iterator is
            `segment.start`, iteration proceeds towards `segment.end`.

        Returns
        -------
        TraceIterator
            A fresh iterator; this one is left untouched.
        """
        return TraceIterator(self._image, segment)

    def values(self):
        """All samples of the trace as a 1D tensor."""
        index = torch.arange(self._length, dtype=torch.float64)
        x = torch.round(self._segment.start.x + index * self._step.x).long()
        y = torch.round(self._segment.start.y + index * self._step.y).long()
        rows, cols = self._image.shape
        inside = (x >= 0) & (y >= 0) & (x < cols) & (y < rows)
        samples = self._image.new_zeros(self._length)
        inside = inside.to(self._image.device)
        x, y = x.to(self._image.device), y.to(self._image.device)
        samples[inside] = self._image[y[inside], x[inside]]
        return samples

    def _sample(self, point):
        x, y = int(round(point.x)), int(round(point.y))
        rows, cols = self._image.shape
        if 0 <= x < cols and 0 <= y < rows:
            return self._image[y, x]
        return self._image.new_zeros(())


def reanchor(iterator, sqrt=False):
    """Re-anchor a trace at the weighted median of its samples.

    Parameters
    ----------
    iterator : TraceIterator
        Trace to re-anchor.
    sqrt : bool, optional
        Weigh the samples by their square root instead of their value.

    Returns
    -------
    TraceIterator
        Iterator starting at the weighted median point and ending at the end
        of the original segment.
    """
    median = int(weighted_median(iterator.values(), sqrt=sqrt))
    anchor = iterator.point_at(median)
    return iterator.transform_domain(Segment(anchor, iterator.segment.end))


def extract_traces(rotated):
    """Every vertical trace of a rotated image, one per column.

    Parameters
    ----------
    rotated : torch.Tensor
        Rotated image of shape (rows, cols).

    Returns
    -------
    torch.Tensor
        Tensor of shape (rows, cols) whose column p holds the trace at offset
        p, i.e. the values of
        ``TraceIterator(rotated, vertical_segment(p, rows))``.
    """
    return rotated.contiguous()


def trace_iterators(rotated):
    """Yield a TraceIterator for every offset of a rotated image."""
    rows, cols = rotated.shape
    for offset in range(cols):
        yield TraceIterator(rotated, vertical_segment(offset, rows))
