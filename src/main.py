from Modeling3D import wavefield
from Viewdata import plotting

wavefield = wavefield("../inputs/Parameters.json")

if wavefield.pmt.plot:
    wavefield.diagnostics.append(plotting(wavefield.pmt))

wavefield.SolveWaveEquation()

if wavefield.pmt.plot and wavefield.pmt.Nrec > 0:
    plotting(wavefield.pmt).viewSeismogram(wavefield.seismogram)
