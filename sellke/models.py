from sellke import SellkeSIR

# Population of 1000 with 10 initial infectives, R0 = 2
tutorial = SellkeSIR((990, 10, 0),
                     (0.05, 10.0, 0.25))

# R0 = 0.8, the epidemic dies out
subcritical = SellkeSIR((990, 10, 0),
                        (0.02, 10.0, 0.25))

# Same as tutorial, with a fifth of the population already immune
immune = SellkeSIR((790, 10, 200),
                   (0.05, 10.0, 0.25))
