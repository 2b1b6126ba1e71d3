"""Cloud Load Balancer node reconciler.

Single-shot tool that registers (or deregisters) this machine's endpoint on a
Rackspace Cloud Load Balancer:
 - resolve the local address
 - locate the matching node on the load balancer
 - create / update / delete it to reach the desired condition
 - retry through "immutable" and rate-limit responses until done

One run owns exactly one (address, port) pair on one load balancer.
"""
