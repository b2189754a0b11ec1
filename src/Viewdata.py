import numpy as np
import matplotlib.pyplot as plt
from mpl_toolkits.axes_grid1 import make_axes_locatable

class plotting:
    """Displays XY, XZ and YZ slices through the source point.

    Used as a diagnostic of ``Modeling3D.wavefield``: it only reads the
    fields it is handed and keeps no reference to them after the call.
    """

    def __init__(self, parameters, show=True):
        self.pmt = parameters
        self.show = show
        self.fig = None

    def adjustColorBar(self, fig, ax, im):
        # Create a divider for the existing axes instance
        divider = make_axes_locatable(ax)
        # Append an axes to the right of the current axes, with the same height
        cax = divider.append_axes("right", size="5%", pad=0.05)
        cbar = fig.colorbar(im, cax=cax)
        return cbar

    def sourceSlices(self, field):
        k, j, i = self.pmt.ksrc, self.pmt.jsrc, self.pmt.isrc
        # pad each slice to a common height so they can be laid side by side
        slices = [field[k, :, :], field[:, j, :], field[:, :, i]]
        height = max(s.shape[0] for s in slices)
        return np.hstack([np.pad(s, ((0, height - s.shape[0]), (0, 0))) for s in slices])

    def __call__(self, it, t, ux, uy, uz):
        # Amplitude of the displacement vector u
        u = np.sqrt(ux ** 2 + uy ** 2 + uz ** 2)
        components = np.vstack([self.sourceSlices(ux), self.sourceSlices(uy), self.sourceSlices(uz)])

        if self.fig is None:
            self.fig = plt.figure(figsize=(10, 10))
        self.fig.clf()
        self.axes = self.fig.subplots(2, 1)

        ax = self.axes[0]
        im = ax.imshow(components, aspect='equal', cmap='jet')
        ax.set_title(f"Step = {it} Time: {t:.4f} sec\nXY XZ YZ slices of UX UY UZ")
        self.adjustColorBar(self.fig, ax, im)

        ax = self.axes[1]
        im = ax.imshow(self.sourceSlices(u), aspect='equal', cmap='jet')
        ax.set_title(r"$u=\sqrt{u_x^2 + u_y^2 + u_z^2}$")
        ax.set_xlabel("XY, XZ, YZ middle slices")
        self.adjustColorBar(self.fig, ax, im)

        if self.show:
            plt.pause(0.001)
        else:
            self.fig.canvas.draw()

    def viewSeismogram(self, seismogram, component=0, perc=99):
        sism = seismogram[component]
        perc = np.percentile(np.abs(sism), perc)
        plt.figure(figsize=(5, 5))
        plt.imshow(sism, aspect='auto', cmap='gray', vmin=-perc, vmax=perc,
                   extent=[0, sism.shape[1], self.pmt.T, 0])
        plt.colorbar(label='Amplitude')
        plt.title(f"Seismogram {('UX', 'UY', 'UZ')[component]}")
        plt.xlabel("Receiver")
        plt.ylabel("Time (s)")
        plt.show()
