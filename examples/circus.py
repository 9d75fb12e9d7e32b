# circus.py
import logging
import sys

import numpy as np
import torch
import matplotlib.pyplot as plt
from tracetransform import trace_transform

def shepp_logan_2d(Nx, Ny):
    Nx = int(Nx)
    Ny = int(Ny)
    phantom = np.zeros((Nx, Ny), dtype=np.float32)
    ellipses = [
        (0.0, 0.0, 0.69, 0.92, 0, 1.0),
        (0.0, -0.0184, 0.6624, 0.8740, 0, -0.8),
        (0.22, 0.0, 0.11, 0.31, -18.0, -0.8),
        (-0.22, 0.0, 0.16, 0.41, 18.0, -0.8),
        (0.0, 0.35, 0.21, 0.25, 0, 0.7),
    ]
    cx = (Nx - 1) / 2
    cy = (Ny - 1) / 2
    xnorm = (np.arange(Nx)[:, None] - cx) / (Nx / 2)
    ynorm = (np.arange(Ny)[None, :] - cy) / (Ny / 2)
    for (x0, y0, a, b, angdeg, ampl) in ellipses:
        th = np.deg2rad(angdeg)
        xprime = (xnorm - x0) * np.cos(th) + (ynorm - y0) * np.sin(th)
        yprime = -(xnorm - x0) * np.sin(th) + (ynorm - y0) * np.cos(th)
        phantom[xprime * xprime / (a * a) + yprime * yprime / (b * b) <= 1.0] += ampl
    return np.clip(phantom, 0.0, 1.0)

def save_circus(result, path):
    # one column per T-P pair, one row per angle
    table = result.circus_table().cpu().numpy().T
    np.savetxt(path, table, header=" ".join(result.circus_headers()), fmt="%.6f")

def main():
    logging.basicConfig(level=logging.INFO)
    device = torch.device("cuda" if torch.cuda.is_available() else "cpu")

    phantom = shepp_logan_2d(128, 128)
    rotated = np.ascontiguousarray(np.rot90(phantom))

    image = torch.from_numpy(phantom).to(device)
    result = trace_transform(image, "Radon,T1,T3", "P1,P3", angle_step=1)
    result_rotated = trace_transform(torch.from_numpy(rotated).to(device),
                                     "Radon,T1,T3", "P1,P3", angle_step=1)
    save_circus(result, sys.argv[1] if len(sys.argv) > 1 else "circus.dat")

    plt.figure(figsize=(12, 8))
    plt.subplot(2, 2, 1)
    plt.imshow(phantom, cmap='gray')
    plt.axis("off")
    plt.title("Phantom")
    plt.subplot(2, 2, 2)
    plt.imshow(result.sinogram("T1").cpu(), aspect='auto', cmap='gray')
    plt.axis("off")
    plt.title("T1 Sinogram")
    plt.subplot(2, 1, 2)
    for header, values in zip(result.circus_headers(), result.circus_table().cpu()):
        plt.plot(values, label=header)
    plt.plot(result_rotated.circus_function("T1", "P1").cpu(), "k--", label="T1-P1 (rotated 90°)")
    plt.xlabel("Angle (degrees)")
    plt.legend()
    plt.title("Circus Functions")
    plt.show()

    # a quarter turn shifts the circus function by 90 angles
    original = result.circus_function("T1", "P1")
    turned = result_rotated.circus_function("T1", "P1")
    deviation = min((torch.roll(original, shift) - turned).abs().max().item()
                    for shift in (90, -90))
    print("T1-P1 max deviation after rotation:", deviation)

if __name__ == "__main__":
    main()
