"""Geocoding and map adapters. Importing ``adapters`` registers every module listed there."""
