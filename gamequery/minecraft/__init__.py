"""Minecraft server queries: Java, Bedrock and legacy Java protocols."""